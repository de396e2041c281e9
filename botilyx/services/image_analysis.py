# botilyx/services/image_analysis.py
"""
Medication packaging recognition with Google Gemini.

The model is asked for a bare JSON object; the reply is cleaned of
markdown fences and mapped onto the inventory form fields.
"""
import io
import json
import logging

import google.generativeai as genai
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

PROMPT = """Look carefully at the photo of this medication box and extract the following fields as JSON.

1. "commercial_name": the brand name of the medication.
2. "quantity": total number of units in the package (e.g. 20, 30, 100) as a number, or null.
3. "unit": the unit of that quantity (e.g. "tablets", "capsules", "ml"), or null.
4. "active_ingredient": the active ingredient and its strength if visible (e.g. "Paracetamol 500mg"), or null.

Reply ONLY with the JSON object, no explanations and no ```json fences. Use null for anything not visible."""

FIELDS = ("commercial_name", "quantity", "unit", "active_ingredient")


class ImageAnalysisUnavailable(Exception):
    pass


class ImageAnalysisError(Exception):
    pass


def load_image(image_bytes):
    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Not a readable image: {e}")
    return image


def _strip_fences(text):
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_analysis(text):
    """Turn the raw model reply into the four form fields."""
    try:
        raw = json.loads(_strip_fences(text))
    except json.JSONDecodeError as e:
        raise ImageAnalysisError(f"Model reply is not JSON: {e}")
    if not isinstance(raw, dict):
        raise ImageAnalysisError("Model reply is not a JSON object")

    result = {field: raw.get(field) for field in FIELDS}
    quantity = result["quantity"]
    if quantity is not None:
        try:
            result["quantity"] = int(quantity)
        except (TypeError, ValueError):
            result["quantity"] = None
    return result


def analyze_medication_image(image_bytes, api_key, model_name):
    if not api_key:
        raise ImageAnalysisUnavailable("GOOGLE_API_KEY is not configured")

    image = load_image(image_bytes)

    genai.configure(api_key=api_key)
    model = genai.GenerativeModel(model_name)
    try:
        response = model.generate_content([PROMPT, image])
        text = response.text
    except Exception as e:
        # API, quota and safety-block errors all surface as a failed analysis
        logger.exception("Vision model %s request failed", model_name)
        raise ImageAnalysisError(f"Vision model request failed: {e}")
    logger.info("Image analysis reply received from %s", model_name)
    return parse_analysis(text)
