#!/usr/bin/env python3
"""
Managed Instance Group Image Deployer

Rolls a new machine image out to a Compute Engine managed instance group:
derives a new instance template from a "-defaults" template, registers it,
points the group at it and recreates the group's running instances.

This script supports running directly from a source checkout that uses a
src/ layout by adding the local `src/` directory to sys.path. For production
use, prefer installing the project and using the `igm-deploy` console script.

Usage:
  python3 main.py -project my-project -template app-web-defaults \\
      -image myapp-abc123 -group web-group
"""

import os
import sys

# Add src/ to path to import modules directly
REPO_ROOT = os.path.dirname(os.path.abspath(__file__))
SRC_PATH = os.path.join(REPO_ROOT, "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from cli import main

if __name__ == "__main__":
    sys.exit(main())
