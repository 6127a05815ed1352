# setup.py
from setuptools import setup, find_packages

setup(
    name="gopack",
    version="0.1.0",
    description="Build-time ES module link resolution and npm dependency mirroring for static sites",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'gopack=gopack.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
