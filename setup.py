"""
Setup script for the turnkit package.

Pure-Python source distribution: the public API (engine.py,
registry.py, timers.py, types.py, errors.py) and the internal
``_engine`` / ``_shared`` packages are installed as readable source.
"""

from setuptools import setup, find_packages

setup(
    name="turnkit",
    version="1.0.0",
    description="Generic turn management core for family turn-based games",
    python_requires=">=3.10",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "python-dotenv>=1.0.0",
        "pydantic>=2.5.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
        "dev": [
            "pytest>=7.4",
            "build",
            "wheel",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
