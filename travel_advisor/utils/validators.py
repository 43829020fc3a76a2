from datetime import datetime
from typing import Any, Dict, List, Optional

from travel_advisor.models.request_models import RecommendationRequest

MAX_TEXT_FIELD_LENGTH = 50


class RecommendationRequestValidator:
    """Validator for recommendation requests"""

    @staticmethod
    def validate_query(query: str, max_length: int = 200) -> List[str]:
        errors = []
        if not query or not query.strip():
            errors.append("Query cannot be empty")
        elif len(query) > max_length:
            errors.append(f"Query cannot exceed {max_length} characters")
        return errors

    @staticmethod
    def validate_travel_date(travel_date: Optional[str]) -> List[str]:
        """Accept only YYYY-MM-DD when a date is given"""
        if not travel_date:
            return []
        try:
            datetime.strptime(travel_date, "%Y-%m-%d")
        except ValueError:
            return ["Travel date must be in YYYY-MM-DD format"]
        return []

    @staticmethod
    def validate_text_field(name: str, value: Optional[str]) -> List[str]:
        if value is not None and len(value) > MAX_TEXT_FIELD_LENGTH:
            return [f"{name} cannot exceed {MAX_TEXT_FIELD_LENGTH} characters"]
        return []

    @staticmethod
    def validate_recommendation_request(request: RecommendationRequest, max_query_length: int = 200) -> Dict[str, Any]:
        """Comprehensive validation of a recommendation request"""
        errors = RecommendationRequestValidator.validate_query(request.query, max_query_length)
        errors += RecommendationRequestValidator.validate_travel_date(request.travel_date)
        for name in ("destination", "city", "departure", "location"):
            errors += RecommendationRequestValidator.validate_text_field(name, getattr(request, name))

        return {
            'valid': len(errors) == 0,
            'errors': errors
        }
