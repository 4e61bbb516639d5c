#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Export, preview, and pack tiled image grid layouts.
"""

# Standard Library
import sys

# local repo modules
import tile_layout_pro.cli


if __name__ == "__main__":
	sys.exit(tile_layout_pro.cli.main())
