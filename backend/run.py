#!/usr/bin/env python3
# backend/run.py
"""
Local server runner for the TrialDesk API.

Creates missing tables on startup and serves on port 8000 with reload.
"""
import os
import sys
from pathlib import Path

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

import uvicorn

if __name__ == "__main__":
    print("Starting TrialDesk API at http://localhost:8000 (docs at /docs)")
    uvicorn.run(
        "trialdesk.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "true").lower() == "true",
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
