"""
Excepciones del dominio del catálogo.

Cada excepción sabe con qué status HTTP y código de error se responde;
los handlers registrados en main.py las convierten al formato estándar:

    {"success": False, "status_code": ..., "message": ..., "error": ...}
"""
from typing import List, Optional, Dict, Any


class CatalogError(Exception):
    """Error base del catálogo"""
    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_content(self) -> Dict[str, Any]:
        return {
            "success": False,
            "status_code": self.status_code,
            "message": self.message,
            "error": self.error_code,
        }


class ValidationError(CatalogError):
    """Campo faltante o inválido, categoría desconocida, precio negativo, imagen faltante..."""
    status_code = 400
    error_code = "VALIDATION_ERROR"

    def __init__(self, messages, details: Optional[List[Dict[str, Any]]] = None):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        self.details = details or []
        super().__init__("; ".join(self.messages))

    def to_content(self) -> Dict[str, Any]:
        content = super().to_content()
        if self.details:
            content["details"] = self.details
        return content


def describe_validation_errors(errors, loc_offset: int = 0):
    """
    Convertir la lista de errores de Pydantic (`exc.errors()`) en
    mensajes legibles y detalles por campo.

    loc_offset permite omitir el primer elemento de `loc` ('body', 'query')
    en los errores de request.
    """
    error_messages = []
    validation_errors = []

    for error in errors:
        field = " -> ".join(str(loc) for loc in error["loc"][loc_offset:]) or "request"
        msg = error["msg"]
        error_type = error["type"]
        ctx = error.get("ctx") or {}

        # Mensajes personalizados según el tipo de error
        if error_type == "string_too_short":
            error_messages.append(f"El campo '{field}' debe tener al menos {ctx.get('min_length', '')} caracteres")
        elif error_type == "string_too_long":
            error_messages.append(f"El campo '{field}' debe tener máximo {ctx.get('max_length', '')} caracteres")
        elif error_type == "missing":
            error_messages.append(f"El campo '{field}' es requerido")
        elif error_type == "enum":
            error_messages.append(f"El campo '{field}' debe ser uno de: {ctx.get('expected', '')}")
        elif error_type in ("decimal_parsing", "decimal_type", "float_parsing", "int_parsing", "finite_number"):
            error_messages.append(f"El campo '{field}' debe ser un número válido")
        elif error_type == "bool_parsing":
            error_messages.append(f"El campo '{field}' debe ser true o false")
        elif error_type == "greater_than_equal":
            error_messages.append(f"El campo '{field}' debe ser mayor o igual que {ctx.get('ge', '')}")
        elif error_type.startswith("greater_than"):
            error_messages.append(f"El campo '{field}' debe ser mayor que {ctx.get('gt', '')}")
        elif error_type == "less_than_equal":
            error_messages.append(f"El campo '{field}' debe ser menor o igual que {ctx.get('le', '')}")
        elif error_type.startswith("less_than"):
            error_messages.append(f"El campo '{field}' debe ser menor que {ctx.get('lt', '')}")
        elif error_type == "value_error":
            error_messages.append(f"El campo '{field}' tiene un valor inválido: {msg}")
        else:
            error_messages.append(f"El campo '{field}': {msg}")

        validation_errors.append({
            "field": field,
            "message": error_messages[-1],
            "type": error_type,
        })

    return error_messages, validation_errors


class NotFoundError(CatalogError):
    status_code = 404
    error_code = "PRODUCT_NOT_FOUND"

    def __init__(self, message: str = "Producto no encontrado"):
        super().__init__(message)


class ConflictError(CatalogError):
    """Violación de unicidad del slug"""
    status_code = 409
    error_code = "DUPLICATE_SLUG"
