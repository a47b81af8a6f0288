#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Minimal setup.py for the STS Toolbox.

All package metadata lives in pyproject.toml; this file only lets legacy
tooling that still invokes setup.py build the package.
"""

import setuptools

if __name__ == "__main__":
    setuptools.setup()
