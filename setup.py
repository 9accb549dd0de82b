# citygrowth/setup.py
from pathlib import Path

from setuptools import find_packages, setup

readme = Path(__file__).parent / "README.md"

setup(
    name="citygrowth",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        # Workbook access
        "openpyxl>=3.1.0",
        # Data
        "numpy>=1.21.3",
        "pandas>=1.3.0",
        # Plotting
        "matplotlib>=3.4.3",
        "seaborn>=0.11.2",
        # Configuration
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=6.2.5",
            "pytest-cov>=3.0.0",
        ],
        "dev": [
            "black>=22.0.0",
            "isort>=5.10.0",
            "pylint>=2.15.0",
            "pytest-cov>=3.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "citygrowth=citygrowth.cli:main",
        ],
    },
    python_requires=">=3.8",
    description="Rank cities by population growth and chart them in an Excel workbook",
    long_description=readme.read_text() if readme.exists() else "",
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Office/Business :: Financial :: Spreadsheet",
    ],
)
