"""
Setup file.
"""

import os

from setuptools import find_packages, setup

KEYWORDS = "avr avrdude microcontroller programmer device-description ini converter"
HERE = os.path.dirname(os.path.abspath(__file__))


if __name__ == "__main__":
    setup(
        name="avrini",
        version="0.1.0",
        description="Convert avrdude.conf into per-device INI files for AVR programmers",
        keywords=KEYWORDS,
        package_dir={"": "src"},
        packages=find_packages(where=os.path.join(HERE, "src")),
        python_requires=">=3.9",
        install_requires=[
            "requests>=2.28",
            "tqdm>=4.64",
        ],
        extras_require={
            "test": ["pytest>=7.0"],
        },
        entry_points={
            "console_scripts": ["avrini=avrini.cli:main"],
        },
        include_package_data=True)
