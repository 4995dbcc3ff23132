"""
Module entrypoint for `python -m certificate_designer`.

This allows running the application as a module from the repository root:
    python -m certificate_designer
"""
from certificate_designer.app import main

if __name__ == "__main__":
    main()
