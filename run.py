"""
Entry Point Script (Bootstrap)
==============================
Development runner for the command-line interface.

Why is this file needed?
------------------------
1. It is located outside the 'src' package to act as a convenient runner.
2. It modifies 'sys.path' so that 'import wavefrontscene' resolves to the
   working tree without installing the package first.

Usage:
    $ python run.py path/to/model.obj -v
"""
import sys
import os

# Add the 'src' directory to the Python path
current_dir: str = os.path.dirname(os.path.abspath(__file__))
src_path: str = os.path.join(current_dir, 'src')
sys.path.insert(0, src_path)

from wavefrontscene.__main__ import main

if __name__ == "__main__":
    sys.exit(main())
