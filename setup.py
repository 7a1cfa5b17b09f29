# -*- coding: utf-8 -*-
import setuptools
import pathlib
import site
import sys

# odd bug with develop (editable) installs, see: https://github.com/pypa/pip/issues/7953
site.ENABLE_USER_SITE = "--user" in sys.argv[1:]

required = [
    "numpy",
    "mashumaro",
    "loguru",
    "click>=8.0.0",
    "rich>=13.0.0",
    "simplejson>= 3.19.2",
    "adafruit-blinka",
    "adafruit-circuitpython-tca9548a",
    "adafruit-circuitpython-pca9685",
    "adafruit-circuitpython-motor",
    "adafruit-circuitpython-tsl2591",
]

extras = {
    "test": ["pytest"],
    "dev": ["pytest", "doit"],
}

here = pathlib.Path(__file__).parent.resolve()

long_description = (here / "README.md").read_text(encoding="utf-8")

# Read version
version = {}
with open(here / "src/turby/_version.py", "r") as f:
    exec(f.read(), version)

if __name__ == "__main__":
    setuptools.setup(
        name="turby",
        version=version["__version__"],
        description="Control software for the Turby tumbling turbidity bioreactor.",
        long_description=long_description,
        long_description_content_type="text/markdown",
        keywords=[
            "turbidity",
            "bioreactor",
            "organoid",
            "dissociation",
            "raspberry pi",
        ],
        classifiers=[
            "License :: OSI Approved :: MIT License",
            "Development Status :: 3 - Alpha",
        ],
        license="MIT",
        package_dir={"": "src"},
        packages=setuptools.find_packages(
            where="src",
            exclude=["*.test", "*.test.*", "test.*", "test", "test_*"],
        ),
        entry_points={
            "console_scripts": [
                "turby=turby.cli:cli",
            ],
        },
        install_requires=required,
        extras_require=extras,
        python_requires=">= 3.11",
        package_data={"": ["*.md"], "turby": ["sysconfig/systems/*.ini"]},
        include_package_data=True,
    )
# https://setuptools.readthedocs.io/en/latest/userguide/datafiles.html
