from __future__ import annotations

import json
import logging
import random
from typing import Any, Optional

from google.genai import types
from pydantic import TypeAdapter

from lokal.ai.base import AIResult, AIStatus, classify_error
from lokal.ai.client import ClientFactory, build_genai_client, get_ai_client
from lokal.ai.mock_data import MOCK_FALLBACK_DEALS
from lokal.ai.schema import (
    DealContent,
    GeneratedDeal,
    GeneratedLead,
    GeocodeResult,
    OutreachEmail,
    Place,
)
from lokal.core import config

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "Unknown Location"
FALLBACK_LOCATION = "Current Location"
FALLBACK_EMAIL_TEXT = "Could not generate email."
FALLBACK_DEAL_TIP = "Lead with the discount in the title and add a clear expiry date to create urgency."
PLACE_CATEGORIES = ("food", "retail", "service")

_DEALS_ADAPTER = TypeAdapter(list[GeneratedDeal])
_LEADS_ADAPTER = TypeAdapter(list[GeneratedLead])


def _grounding_chunks(response: Any) -> list[Any]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    if metadata is None:
        return []
    return list(getattr(metadata, "grounding_chunks", None) or [])


def _web_sources(chunks: list[Any]) -> list[dict[str, Optional[str]]]:
    sources = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is not None:
            sources.append({"title": getattr(web, "title", None), "uri": getattr(web, "uri", None)})
    return sources


def _maps_address(maps: Any) -> Optional[str]:
    return getattr(maps, "formatted_address", None) or getattr(maps, "text", None)


class AIGateway:
    """Stateless wrapper over the Gemini API.

    Every call builds a fresh client from the key in the environment and
    returns an ``AIResult`` whose ``value`` is already the degraded value
    when the call fails. Nothing is retried.
    """

    def __init__(
        self,
        client_factory: ClientFactory = build_genai_client,
        *,
        model: Optional[str] = None,
        search_model: Optional[str] = None,
        maps_model: Optional[str] = None,
    ) -> None:
        self._client_factory = client_factory
        self.model = model or config.GEMINI_MODEL
        self.search_model = search_model or config.GEMINI_SEARCH_MODEL
        self.maps_model = maps_model or config.GEMINI_MAPS_MODEL

    def _generate(self, model: str, prompt: str, generation_config: Optional[types.GenerateContentConfig] = None):
        client = get_ai_client(self._client_factory)
        return client.models.generate_content(model=model, contents=prompt, config=generation_config)

    def _failure(self, label: str, exc: BaseException, value: Any) -> AIResult:
        status = classify_error(exc)
        logger.error("[AI] %s error: %s", label, exc, extra={"ai_status": status.value})
        return AIResult(status=status, value=value, error=str(exc))

    @staticmethod
    def _json_config(schema: Any) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(response_mime_type="application/json", response_schema=schema)

    def reverse_geocode(self, lat: float, lng: float) -> AIResult[str]:
        prompt = (
            f"What city and country is at Latitude: {lat}, Longitude: {lng}? "
            'Return only the city name (e.g., "San Francisco" or "Mumbai"). Do not add any other text.'
        )
        try:
            response = self._generate(self.model, prompt)
        except Exception as exc:
            return self._failure("Reverse geocode", exc, FALLBACK_LOCATION)

        text = (response.text or "").strip()
        if not text:
            return AIResult(status=AIStatus.EMPTY, value=UNKNOWN_LOCATION)
        return AIResult(status=AIStatus.SUCCESS, value=text)

    def geocode_city(self, query: str) -> AIResult[Optional[dict[str, Any]]]:
        prompt = (
            f'Return the latitude and longitude for the city: "{query}". '
            'Return JSON format: { "lat": number, "lng": number, "city": "Formatted City Name" }'
        )
        try:
            response = self._generate(self.model, prompt, self._json_config(GeocodeResult))
            payload = json.loads(response.text or "null")
            if payload is None:
                return AIResult(status=AIStatus.EMPTY, value=None)
            result = GeocodeResult.model_validate(payload)
        except Exception as exc:
            return self._failure("Geocode", exc, None)
        return AIResult(status=AIStatus.SUCCESS, value=result.model_dump())

    def fetch_nearby_deals(self, lat: float, lng: float, city: str = "Downtown Area") -> AIResult[list[dict[str, Any]]]:
        """Model-generated deals for the area. They are never persisted."""
        prompt = (
            f"Generate 6 realistic local deals/coupons for businesses in {city} (Lat: {lat}, Lng: {lng}). "
            "If the location is in India, use INR/Rupees currency and appropriate business names. "
            "Include a mix of Restaurants (food), Retail stores, and Services. "
            "Make them sound exciting and urgent. "
            "Include a realistic website URL for each business."
        )
        try:
            response = self._generate(self.model, prompt, self._json_config(list[GeneratedDeal]))
            items = _DEALS_ADAPTER.validate_python(json.loads(response.text or "[]"))
        except Exception as exc:
            fallback = [dict(deal) for deal in MOCK_FALLBACK_DEALS] if config.ENABLE_MOCK_DATA else []
            if fallback:
                logger.warning("[AI] Using fallback mock deals (ENABLE_MOCK_DATA=true)")
            return self._failure("Nearby deals", exc, fallback)

        deals = []
        for index, item in enumerate(items):
            deal = item.model_dump(mode="json")
            deal["business_id"] = f"ai-gen-{index}"
            deal["imageUrl"] = f"https://picsum.photos/400/300?random={index + random.randint(0, 999)}"
            deals.append(deal)
        return AIResult(status=AIStatus.SUCCESS if deals else AIStatus.EMPTY, value=deals)

    def fetch_business_leads(self, lat: float, lng: float, city: str = "Downtown") -> AIResult[list[dict[str, Any]]]:
        prompt = (
            f"Generate 5 fictional or realistic small businesses in {city} (Lat: {lat}, Lng: {lng}) "
            "that are NOT currently on our platform but would be good candidates for a deals app. "
            "Include name, type (e.g. Italian Restaurant), and location."
        )
        try:
            response = self._generate(self.model, prompt, self._json_config(list[GeneratedLead]))
            items = _LEADS_ADAPTER.validate_python(json.loads(response.text or "[]"))
        except Exception as exc:
            return self._failure("Business leads", exc, [])

        leads = []
        for item in items:
            lead = item.model_dump(mode="json")
            lead["contactStatus"] = "new"
            leads.append(lead)
        return AIResult(status=AIStatus.SUCCESS if leads else AIStatus.EMPTY, value=leads)

    def generate_outreach_email(self, business_name: str, business_type: str) -> AIResult[Optional[dict[str, Any]]]:
        """Drafts an invitation email with search grounding.

        Failures are not degraded into placeholder text; the result keeps the
        permission/configuration status so the caller can offer a fix.
        """
        contact_lines = []
        if config.OUTREACH_SENDER_EMAIL:
            contact_lines.append(f"Email: {config.OUTREACH_SENDER_EMAIL}")
        if config.OUTREACH_SENDER_PHONE:
            contact_lines.append(f"Phone: {config.OUTREACH_SENDER_PHONE}")
        contact_block = "\n".join(contact_lines) or "(no contact details configured)"

        prompt = (
            'I am the owner of "Lokal", a local deals app. '
            f'I want to invite "{business_name}" ({business_type}) to join our platform to offer exclusive coupons.\n\n'
            f"My Contact Info (include this at the bottom):\n{contact_block}\n\n"
            "Search for this business to find what makes them special, and draft a short, professional, "
            "and persuasive email inviting them to join Lokal. "
            "Highlight how they can get more local foot traffic."
        )
        search_config = types.GenerateContentConfig(tools=[types.Tool(google_search=types.GoogleSearch())])
        try:
            response = self._generate(self.search_model, prompt, search_config)
        except Exception as exc:
            return self._failure("Outreach email", exc, None)

        sources = _web_sources(_grounding_chunks(response))
        email = OutreachEmail(text=response.text or FALLBACK_EMAIL_TEXT, sources=sources)
        return AIResult(status=AIStatus.SUCCESS, value=email.model_dump(), sources=sources)

    def search_local_places(self, query: str, lat: float, lng: float) -> AIResult[list[dict[str, Any]]]:
        prompt = (
            f'Find places matching "{query}" near Latitude: {lat}, Longitude: {lng}. '
            f"Only include businesses in these categories: {', '.join(PLACE_CATEGORIES)}. "
            "List each place with its name and address."
        )
        maps_config = types.GenerateContentConfig(
            tools=[types.Tool(google_maps=types.GoogleMaps())],
            tool_config=types.ToolConfig(
                retrieval_config=types.RetrievalConfig(lat_lng=types.LatLng(latitude=lat, longitude=lng))
            ),
        )
        try:
            response = self._generate(self.maps_model, prompt, maps_config)
        except Exception as exc:
            return self._failure("Place search", exc, [])

        places: list[Place] = []
        for chunk in _grounding_chunks(response):
            maps = getattr(chunk, "maps", None)
            web = getattr(chunk, "web", None)
            if maps is not None:
                places.append(
                    Place(
                        title=getattr(maps, "title", None) or "",
                        uri=getattr(maps, "uri", None) or getattr(maps, "google_maps_uri", None),
                        address=_maps_address(maps),
                        source="maps",
                    )
                )
            elif web is not None:
                places.append(Place(title=getattr(web, "title", None) or "", uri=getattr(web, "uri", None), source="web"))

        values = [place.model_dump() for place in places]
        return AIResult(status=AIStatus.SUCCESS if values else AIStatus.EMPTY, value=values)

    def generate_deal_content(self, business_name: str, business_type: str) -> AIResult[Optional[dict[str, Any]]]:
        prompt = (
            f'Write a compelling deal for "{business_name}", a {business_type}. '
            "Return a short catchy title, a one or two sentence description, the discount "
            "(e.g. 20% OFF, BOGO) and a short uppercase redemption code."
        )
        try:
            response = self._generate(self.model, prompt, self._json_config(DealContent))
            payload = json.loads(response.text or "null")
            if payload is None:
                return AIResult(status=AIStatus.EMPTY, value=None)
            content = DealContent.model_validate(payload)
        except Exception as exc:
            return self._failure("Deal content", exc, None)
        return AIResult(status=AIStatus.SUCCESS, value=content.model_dump())

    def analyze_deal(self, deal: dict[str, Any]) -> AIResult[str]:
        prompt = (
            "You are a marketing coach for small local businesses. "
            f"Deal title: {deal.get('title', '')}. Description: {deal.get('description', '')}. "
            f"Discount: {deal.get('discount', '')}. "
            "Give one tip to make this deal more attractive, in under 20 words."
        )
        try:
            response = self._generate(self.model, prompt)
        except Exception as exc:
            return self._failure("Deal analysis", exc, FALLBACK_DEAL_TIP)

        text = (response.text or "").strip()
        if not text:
            return AIResult(status=AIStatus.EMPTY, value=FALLBACK_DEAL_TIP)
        return AIResult(status=AIStatus.SUCCESS, value=text)


_gateway = AIGateway()


def get_ai_gateway() -> AIGateway:
    return _gateway
