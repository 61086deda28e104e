from google import genai
from google.genai import types
import json
import logging
import math
import time
from dataclasses import dataclass

from pydantic import ValidationError

from farmguard.config import Settings
from farmguard.constants.languages import DEFAULT_LANGUAGE, get_language_name, get_language_script
from farmguard.exceptions import ImageFetchError
from farmguard.schemas.analysis import AnalysisResult
from farmguard.services.image import ImageService

logger = logging.getLogger(__name__)


def _reject_constant(name: str):
    raise ValueError(f"non-finite number {name} in model output")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"non-finite number {text} in model output")
    return value


@dataclass
class AnalysisOutcome:
    analysis: AnalysisResult
    model: str
    processing_time_ms: int

    @property
    def degraded(self) -> bool:
        return self.analysis.degraded


ANALYSIS_PROMPT = """
Role: You are an expert Agronomist, Plant Pathologist, Entomologist and Wildlife Officer
advising a working farm.

Task:
Inspect the attached field image and report every crop health problem and every animal
that threatens the crop.

[LANGUAGE INSTRUCTION]: {language_instruction}

Check for ALL of the following:
1. Diseases
   - Fungal (blights, rusts, mildews, leaf spots, rots, wilts)
   - Bacterial (leaf blight, soft rot, canker, bacterial wilt)
   - Viral (mosaic, leaf curl, yellowing, stunting)
   - Nutrient deficiencies (nitrogen, phosphorus, potassium, iron, zinc, magnesium):
     use category "nutrient_deficiency"
2. Pests
   - Insects (aphids, whiteflies, thrips, caterpillars, borers, beetles, hoppers, mites)
   - Report type, lifestage (egg, larva, nymph, pupa, adult) and damageType
     (chewing, sucking, boring, mining)
3. Wildlife
   - Wild boar, deer, nilgai, monkeys, elephants, rabbits, porcupines, rodents, birds,
     stray cattle or dogs
   - Estimate the distance from the camera in meters, the count, where in the frame the
     animal is, and the threat level (low, medium, high)

Severity bands for the whole image:
- none: healthy crop, nothing found
- low: isolated symptoms, under 10% of the visible plants
- medium: 10-30% affected, action needed this week
- high: 30-60% affected, act today
- critical: over 60% affected or crop loss imminent

Confidence bands (0-100) for every detection:
- 90-100: unmistakable
- 70-89: likely
- 50-69: possible
- below 50: do not report the item

Treatment categories:
- whatToDoNow: immediate steps for the next 24 hours
- prevention: steps to stop recurrence
- organicOptions: organic and biological controls
- chemicalOptions: chemical controls (active ingredients only)

Output Rules:
- STRICT JSON ONLY
- No markdown
- No extra text
- Empty arrays when nothing applies

JSON FORMAT:
{{
    "cropType": "",
    "diseaseDetected": false,
    "pestsDetected": false,
    "animalsDetected": false,
    "severity": "none",
    "summary": "",
    "diseases": [
        {{"name": "", "category": "", "confidence": 0, "symptoms": []}}
    ],
    "pests": [
        {{"name": "", "type": "", "lifestage": "", "confidence": 0, "damageType": ""}}
    ],
    "animals": [
        {{"type": "", "name": "", "confidence": 0, "estimatedDistance": 0, "location": "", "count": 1,
          "threatLevel": ""}}
    ],
    "whatToDoNow": [],
    "prevention": [],
    "organicOptions": [],
    "chemicalOptions": []
}}
"""


def build_language_instruction(language: str) -> str:
    if not language or language.lower() == DEFAULT_LANGUAGE:
        return "Respond in ENGLISH."
    name = get_language_name(language).upper()
    script = get_language_script(language)
    return (
        f"Respond entirely in {name}. ALL text fields (names, symptoms, summary, guidance, locations) "
        f"MUST be written in the native {script} script of {name}. Only scientific names may remain "
        f"in English. JSON keys and the severity/category/type codes stay exactly as shown in English."
    )


def build_prompt(language: str = DEFAULT_LANGUAGE) -> str:
    return ANALYSIS_PROMPT.format(language_instruction=build_language_instruction(language))


class GeminiService:
    """
    Calls the vision model once per image and always returns a usable analysis.

    Any failure along the way (image download, model call, unparseable or
    invalid JSON) yields the degraded "analysis unavailable" result instead of
    an exception.
    """

    def __init__(self, settings: Settings, *, client=None, image_service: ImageService = None):
        # Initialize the GenAI Client
        self.client = client or genai.Client(api_key=settings.GEMINI_API_KEY)
        self.model = settings.GEMINI_MODEL_VISION
        self.image_service = image_service or ImageService(
            fetch_timeout=settings.IMAGE_FETCH_TIMEOUT, max_bytes=settings.MAX_IMAGE_BYTES
        )

    async def _generate(self, image_data: bytes, mime_type: str, language: str) -> str:
        content_part = types.Part.from_bytes(data=image_data, mime_type=mime_type)
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=[build_prompt(language), content_part],
            config=types.GenerateContentConfig(response_mime_type="application/json")
        )
        return response.text or ""

    @staticmethod
    def parse_response(raw_text: str) -> AnalysisResult:
        """Parse and validate model output; falls back to the unavailable analysis."""
        try:
            # NaN/Infinity (or 1e999) cannot be stored in JSONB
            payload = json.loads(raw_text, parse_constant=_reject_constant, parse_float=_finite_float)
        except (ValueError, TypeError):
            logger.warning(f"Model returned invalid JSON ({len(raw_text or '')} chars), using fallback analysis")
            return AnalysisResult.unavailable()

        # Some responses wrap the object in a single-element list
        if isinstance(payload, list) and len(payload) == 1:
            payload = payload[0]
        if not isinstance(payload, dict):
            logger.warning(f"Model returned {type(payload).__name__} instead of an object, using fallback analysis")
            return AnalysisResult.unavailable()

        try:
            return AnalysisResult.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Model payload failed validation ({e.error_count()} errors), using fallback analysis")
            return AnalysisResult.unavailable()

    async def analyze_image(self, image_url: str, language: str = DEFAULT_LANGUAGE) -> AnalysisOutcome:
        started = time.perf_counter()

        try:
            image_data, mime_type = await self.image_service.load(image_url)
            logger.info(f"🔬 Analysing image with {self.model} (language={language})...")
            raw_text = await self._generate(image_data, mime_type, language)
            analysis = self.parse_response(raw_text)
        except ImageFetchError as e:
            logger.warning(f"Image unavailable for analysis: {e}")
            analysis = AnalysisResult.unavailable()
        except Exception as e:
            logger.error(f"Vision model call failed: {e}")
            analysis = AnalysisResult.unavailable()

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        if analysis.degraded:
            logger.warning(f"⚠️ Degraded analysis returned after {elapsed_ms}ms")
        else:
            logger.info(f"✅ Analysis complete in {elapsed_ms}ms (severity={analysis.severity})")
        return AnalysisOutcome(analysis=analysis, model=self.model, processing_time_ms=elapsed_ms)
