#!/usr/bin/env python3
"""
Convenience wrapper for running the fee forecaster from a checkout.
Prefer the installed `feeforecast` console script.
"""

from feeforecast.cli import main

if __name__ == "__main__":
    main()
