"""
Serverless entrypoint for the Crop Advisor API
"""
import json
import logging

logger = logging.getLogger(__name__)

STARTUP_FAILURE_BODY = json.dumps({"error": "Service failed to start"}).encode("utf-8")

try:
    from crop_advisor.main import app
except Exception:
    logger.exception("Crop Advisor API failed to import")

    async def app(scope, receive, send):
        """Answer every HTTP request with a generic 500 until the deployment is fixed"""
        if scope["type"] != "http":
            return
        await send({
            "type": "http.response.start",
            "status": 500,
            "headers": [[b"content-type", b"application/json"]],
        })
        await send({"type": "http.response.body", "body": STARTUP_FAILURE_BODY})
