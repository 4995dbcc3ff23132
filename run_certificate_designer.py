#!/usr/bin/env python
"""
Launcher script for Certificate Designer.

Usage from repo root:
    python run_certificate_designer.py [template.json | background.pdf]

Alternative:
    python -m certificate_designer
"""
from certificate_designer.app import main

if __name__ == "__main__":
    main()
