"""Setup script for estream package."""

from setuptools import setup, find_packages

setup(
    name='estream',
    version='1.0',
    packages=find_packages(include=['estream', 'estream.*']),
    package_data={'estream.config': ['defaults.yaml']},
    python_requires='>=3.9',
    install_requires=[
        'numpy>=1.20.0',
        'scipy>=1.9.0',
        'matplotlib>=3.3.0',
        'pyyaml>=5.4',
        'h5py>=3.0',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': ['estream=estream.cli:main'],
    },
)
