"""
Crop Image Analysis
Identifies the crop in a photo and reports its health using a vision model via OpenRouter
"""

import logging
from typing import Optional

from crop_advisor.config import BASE64_OVERHEAD, IMAGE_ANALYSIS_MODEL, MAX_IMAGE_SIZE
from crop_advisor.errors import UpstreamError, ValidationError
from crop_advisor.models import ImageAnalysisRequest
from crop_advisor.validation import parse_model

logger = logging.getLogger(__name__)

INVALID_IMAGE_MESSAGE = "Invalid image data"

SYSTEM_PROMPT = (
    "You are an agricultural expert. Analyze crop images and identify the crop type, "
    "health status, and any visible issues. Provide recommendations."
)

USER_PROMPT = (
    "Identify this crop and provide: crop name, health status (healthy/diseased/pest damage), "
    "visible issues, and brief recommendations."
)


def validate_image_data_url(image_base64: str) -> str:
    """Accept only base64 data URLs of images, up to roughly MAX_IMAGE_SIZE decoded bytes"""
    if not image_base64.startswith("data:image/"):
        raise ValidationError(INVALID_IMAGE_MESSAGE)
    if len(image_base64) > MAX_IMAGE_SIZE * BASE64_OVERHEAD:
        raise ValidationError(INVALID_IMAGE_MESSAGE, details="Image size exceeds 10MB")
    return image_base64


class CropImageAnalyzer:
    def __init__(self, client, model: str = IMAGE_ANALYSIS_MODEL):
        self.client = client
        self.model = model

    async def analyze(self, payload) -> str:
        request = parse_model(ImageAnalysisRequest, payload, message=INVALID_IMAGE_MESSAGE)
        image_url = validate_image_data_url(request.image_base64)

        if not self.client:
            logger.error("OpenRouter API key not configured for image analysis")
            raise UpstreamError("Image analysis service not configured")

        logger.info("Analyzing crop image with AI...")

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": USER_PROMPT},
                            {"type": "image_url", "image_url": {"url": image_url}},
                        ],
                    },
                ],
            )
        except Exception as e:
            logger.error(f"AI gateway error: {e}")
            raise UpstreamError("Failed to analyze image") from e

        analysis: Optional[str] = None
        if response and response.choices:
            analysis = response.choices[0].message.content

        if not analysis:
            logger.error("AI gateway returned an empty analysis")
            raise UpstreamError("Failed to analyze image")

        logger.info(f"Analysis complete: {analysis[:100]}")
        return analysis
