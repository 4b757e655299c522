"""
Modulo de excepciones de aplicacion.

Los servicios (casos de uso) nunca construyen respuestas HTTP. Cuando una
operacion no puede completarse lanzan una de estas excepciones y el
manejador central (lifehack/errors.py) la traduce al codigo HTTP y al
sobre de error correspondiente:

    ValidationException -> 400
    NotFoundException   -> 404
    ConflictException   -> 409
    InfraException      -> 500 (el mensaje interno nunca llega al cliente)

Patron de diseno: Jerarquia de excepciones con "tipo"
-----------------------------------------------------
Todas heredan de AppException, que guarda un ErrorType. El manejador
solo necesita mirar ese atributo para decidir el codigo de estado.
"""

from enum import Enum


class ErrorType(str, Enum):
    VALIDATION = "Validation"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    INFRASTRUCTURE = "Infrastructure"


class AppException(Exception):
    """
    Excepcion base de la aplicacion.

    Atributos:
        message (str): Mensaje legible que se envia como `detail`.
        error_type (ErrorType): Categoria usada para elegir el codigo HTTP.
    """

    def __init__(self, message: str, error_type: ErrorType):
        super().__init__(message)
        self.message = message
        self.error_type = error_type


class ValidationException(AppException):
    """
    Error de validacion de datos de entrada (HTTP 400).

    Puede llevar un mapa de errores por campo:
        {"Name": ["Category name must be at least 2 characters"]}
    """

    DEFAULT_MESSAGE = "One or more validation errors occurred."

    def __init__(self, message: str | None = None, errors: dict[str, list[str]] | None = None):
        super().__init__(message or self.DEFAULT_MESSAGE, ErrorType.VALIDATION)
        self.errors = errors or {}


class NotFoundException(AppException):
    def __init__(self, message: str):
        super().__init__(message, ErrorType.NOT_FOUND)

    @classmethod
    def for_resource(cls, resource: str, resource_id) -> "NotFoundException":
        return cls(f"{resource} with ID '{resource_id}' not found")


class ConflictException(AppException):
    def __init__(self, message: str):
        super().__init__(message, ErrorType.CONFLICT)


class InfraException(AppException):
    """
    Fallo de infraestructura (Firestore, S3, Firebase Auth...).

    Guarda la excepcion original en `cause` para los logs; el cliente
    solo recibe un mensaje generico.
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, ErrorType.INFRASTRUCTURE)
        self.cause = cause


class ValidationErrorBuilder:
    """
    Acumula errores de validacion por campo antes de lanzar una unica
    ValidationException con todos ellos.

    Uso:
        builder = ValidationErrorBuilder()
        builder.add_error("Name", "Category name cannot be empty")
        if builder.has_errors:
            raise builder.build()
    """

    def __init__(self):
        self._errors: dict[str, list[str]] = {}

    def add_error(self, field: str, message: str) -> "ValidationErrorBuilder":
        self._errors.setdefault(field, []).append(message)
        return self

    @property
    def has_errors(self) -> bool:
        return bool(self._errors)

    def build(self) -> ValidationException:
        return ValidationException(errors={k: list(v) for k, v in self._errors.items()})
