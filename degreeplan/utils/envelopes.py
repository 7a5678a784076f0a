from typing import Any, Dict, Optional

from degreeplan.utils.exceptions import AppException


def api_success(data: Any) -> Dict[str, Any]:
	return {"success": True, "data": data, "error": None}


def api_error(code: str, message: str, details: Optional[Any] = None) -> Dict[str, Any]:
	error: Dict[str, Any] = {"code": code, "message": message}
	if details is not None:
		error["details"] = details
	return {"success": False, "data": None, "error": error}


def api_exception(exc: AppException) -> Dict[str, Any]:
	# 5xx messages stay generic; storage details never reach the client
	if exc.status_code >= 500:
		return api_error(code=exc.code, message="An internal server error occurred. Please try again later.")
	return api_error(code=exc.code, message=exc.message, details=exc.details)
