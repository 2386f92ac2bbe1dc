import sys
from pathlib import Path

from setuptools import setup, find_namespace_packages

if sys.version_info[0:2] < (3, 8):
    raise RuntimeError("This package requires Python 3.8+.")

setup(
    name="moat-lib-pidctl",
    version="0.1.0",
    packages=find_namespace_packages(include=["moat.*"]),
    package_data={"moat.lib.pidctl": ["_cfg.yaml"]},
    url="https://github.com/M-o-a-T/moat",
    license="MIT",
    author="Matthias Urlichs",
    author_email="<matthias@urlichs.de>",
    description="A PID controller with derivative-on-measurement and anti-windup",
    long_description=Path(__file__).with_name("README.rst").read_text(encoding="utf-8"),
    long_description_content_type="text/x-rst",
    install_requires=["moat-util"],
    extras_require={"test": ["pytest", "numpy"]},
    python_requires=">=3.8",
    classifiers=[
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering",
        "License :: OSI Approved",
    ],
)
