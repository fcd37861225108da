"""
Run the Business Action Assistant REST API.

Usage:
    python run_api.py

Endpoints:
    POST /api/chat      {user_id, message, document_ids?, conversation_id?, variant?}
    GET  /api/tools     ?variant=default|customer_service
    GET  /health

Environment variables: see run_cli.py. The API additionally needs the
document index to be buildable at startup (DATA_DIR / VECTORSTORE_PATH).
"""

import logging
import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

import uvicorn

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "adapters.rest.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
