#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.
For local development only.
"""
import os
from pathlib import Path

import uvicorn

backend_dir = Path(__file__).parent
os.chdir(backend_dir)

if __name__ == "__main__":
    print("🌐 Access at: http://localhost:8000")
    print("📚 API Docs: http://localhost:8000/docs")
    print("🔌 Socket: ws://localhost:8000/ws?token=<jwt>")

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
