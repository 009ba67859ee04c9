# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="dtcheck",
    version="0.1.0",
    description="Structural invariant checker for in-memory directory trees",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["dtcheck", "dtcheck.*"]),
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'dtcheck=dtcheck.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
