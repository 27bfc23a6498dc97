"""
Setup script for swerve-kinematics package.

This package provides inverse kinematics, minimal-rotation module
optimization and pose simulation for four-module swerve drive robots.
"""

from setuptools import setup, find_packages
import os

# Read long description from README
here = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(here, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

# Read requirements
with open(os.path.join(here, 'requirements.txt'), encoding='utf-8') as f:
    requirements = [line.strip() for line in f if line.strip() and not line.startswith('#')]

# Split core requirements from test tooling
core_requirements = []
test_requirements = []

for req in requirements:
    if any(test_pkg in req for test_pkg in ['pytest']):
        test_requirements.append(req)
    else:
        core_requirements.append(req)

setup(
    name='swerve-kinematics',
    version='1.0.0',
    description='Swerve Drive Inverse Kinematics and Pose Simulation',
    long_description=long_description,
    long_description_content_type='text/markdown',
    author='Swerve Kinematics Team',

    packages=find_packages(where='src'),
    package_dir={'': 'src'},

    # Core dependencies
    install_requires=core_requirements,

    # Optional dependencies
    extras_require={
        'test': test_requirements,
        'dev': test_requirements,
    },

    # Python version requirement
    python_requires='>=3.8',

    # Entry points for command line usage
    entry_points={
        'console_scripts': [
            'swerve-sim=swerve_kinematics.main:main',
        ],
    },

    # Classifiers for PyPI
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Education',
        'Intended Audience :: Developers',
        'Topic :: Scientific/Engineering :: Mathematics',
        'Topic :: Software Development :: Libraries :: Python Modules',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
    ],

    # Keywords for searchability
    keywords='robotics swerve-drive kinematics inverse-kinematics simulation frc',
)
