"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class IntegrityError(DomainError):
    """Stored data violates a structural invariant (e.g. a parent cycle)."""


# Journal validation messages

ENTRY_DATE_REQUIRED = "La fecha del asiento es requerida"
MINIMUM_LINES = "Un asiento contable debe tener al menos 2 líneas"
TOTAL_NOT_POSITIVE = "El monto total del asiento debe ser mayor a cero"
DESCRIPTION_REQUIRED = "La descripción del asiento es requerida"
ENTRY_NOT_FOUND = "Asiento contable no encontrado"
ENTRY_ALREADY_POSTED = "El asiento ya está publicado"
ENTRY_POSTED_IMMUTABLE = "No se puede modificar un asiento ya publicado"
ENTRY_POSTED_DELETE = (
    "No se puede eliminar un asiento publicado. Use reversión en su lugar."
)
ONLY_POSTED_REVERSIBLE = "Solo se pueden reversar asientos publicados"
ENTRY_ALREADY_REVERSED = "Este asiento ya ha sido reversado"
CLOSED_PERIOD_YEAR = (
    "No se puede modificar o reversar un asiento de un periodo cerrado (año anterior)."
)
CLOSED_PERIOD_MONTH = (
    "No se puede modificar o reversar un asiento de un periodo cerrado (mes anterior)."
)
INVALID_DATE_RANGE = "La fecha de inicio debe ser anterior o igual a la fecha de fin"


def entry_not_balanced(total_debit: Decimal, total_credit: Decimal, difference: Decimal) -> str:
    """Return message for an unbalanced entry."""
    return (
        f"El asiento no cuadra. Total Debe: {total_debit:.2f}, "
        f"Total Haber: {total_credit:.2f}, Diferencia: {difference:.2f}"
    )


def cannot_post(reason: str) -> str:
    return f"No se puede publicar: {reason}"


def line_account_required(line_number: int) -> str:
    return f"Línea {line_number}: La cuenta es requerida"


def line_negative_amount(line_number: int) -> str:
    return f"Línea {line_number}: Los montos no pueden ser negativos"


def line_not_detail_account(line_number: int, account_number: str) -> str:
    return (
        f"Línea {line_number}: La cuenta {account_number} es de agrupación "
        "y no admite movimientos"
    )


def line_inactive_account(line_number: int, account_number: str) -> str:
    return f"Línea {line_number}: La cuenta {account_number} está inactiva"


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Cuenta {account_id} no encontrada"


def account_number_not_found(account_number: str) -> str:
    return f"Cuenta '{account_number}' no encontrada"


def currency_not_found(currency_id: int) -> str:
    """Return message for missing currency."""
    return f"Moneda {currency_id} no encontrada"


def duplicate_account_number(account_number: str) -> str:
    return f"Ya existe una cuenta con el número '{account_number}'"


def duplicate_currency_code(code: str) -> str:
    return f"Ya existe una moneda con el código '{code}'"


def account_delete_blocked(account_id: int, line_count: int, child_count: int) -> str:
    """Return message when account has dependent lines or children."""
    parts = []
    if line_count > 0:
        parts.append(f"{line_count} movimiento{'s' if line_count != 1 else ''}")
    if child_count > 0:
        parts.append(f"{child_count} subcuenta{'s' if child_count != 1 else ''}")
    return (
        f"No se puede eliminar la cuenta {account_id}: tiene {' y '.join(parts)}. "
        "Desactívela en su lugar."
    )


def account_cycle_detected(account_id: int) -> str:
    return f"Ciclo detectado en la jerarquía de cuentas (cuenta {account_id})"


# Chart of accounts messages

ACCOUNT_NUMBER_INVALID = "El número de cuenta debe tener entre 1 y 20 caracteres"
ACCOUNT_NAME_REQUIRED = "El nombre de la cuenta es requerido"
LEAF_ONLY_MUST_BE_DETAIL = "Las cuentas de tipo Costos solo pueden ser cuentas de detalle"
PARENT_IS_SELF = "Una cuenta no puede ser su propia cuenta padre"
PARENT_IS_DESCENDANT = "La cuenta padre no puede ser una subcuenta de la misma cuenta"
PARENT_IS_DETAIL = "La cuenta padre debe ser una cuenta de agrupación"
DETAIL_WITH_CHILDREN = "Una cuenta con subcuentas no puede ser de detalle"
GROUPING_WITH_LINES = "Una cuenta con movimientos no puede convertirse en cuenta de agrupación"
ACTIVE_CHILDREN = "No se puede desactivar una cuenta con subcuentas activas"


def invalid_account_type(value: str) -> str:
    return f"Tipo de cuenta inválido: '{value}'"


def parent_type_not_allowed(parent_type: str, child_type: str) -> str:
    return f"Una cuenta de tipo {parent_type} no admite subcuentas de tipo {child_type}"


def parent_not_found(parent_account_id: int) -> str:
    return f"Cuenta padre {parent_account_id} no encontrada"


# Currency messages

CURRENCY_CODE_INVALID = "El código de moneda debe tener 3 letras"
CURRENCY_NAME_REQUIRED = "El nombre de la moneda es requerido"
EXCHANGE_RATE_NOT_POSITIVE = "El tipo de cambio debe ser mayor a cero"
ACCOUNT_DEPTH_EXCEEDED = "Se excedió la profundidad máxima de la jerarquía de cuentas"
COMPARE_PERIOD_INCOMPLETE = (
    "El periodo de comparación requiere fecha de inicio y fecha de fin"
)
