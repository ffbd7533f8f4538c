# run_dev.py
"""
Local development launcher for FastAPI.
Equivalent to: `uvicorn fortec_gateway.app:app --reload --host 0.0.0.0 --port 5000`
"""

import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "fortec_gateway.app:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "5000")),
        reload=True,
    )
