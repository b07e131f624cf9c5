"""User-facing authentication messages."""

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "identifier_required": "Email or registration number is required.",
        "admin_email_required": "Administrators sign in with their email address.",
        "user_not_found": (
            "User not found. Please check your email or registration number."
        ),
        "admin_not_found": "User not found. Please check your email address.",
        "not_an_admin": "Access denied. Administrator privileges are required.",
        "admin_via_user_form": (
            "This user is an administrator. Please use the administrator login form."
        ),
        "password_required": "Password is required for administrators.",
        "invalid_credentials": "Invalid email or password.",
        "storage_unavailable": "The service is temporarily unavailable. Please try again.",
        "email_taken": "This email address is already registered.",
        "medical_id_taken": "This registration number is already registered.",
        "medical_id_required": "Attendees must keep a registration number.",
        "attendee_password_not_allowed": "Only administrators have a password.",
    },
    "es": {
        "identifier_required": "Correo o número de identificación requerido.",
        "admin_email_required": (
            "Los administradores inician sesión con su correo electrónico."
        ),
        "user_not_found": (
            "Usuario no encontrado. Por favor verifique su correo o número de identificación."
        ),
        "admin_not_found": (
            "Usuario no encontrado. Por favor verifique su correo electrónico."
        ),
        "not_an_admin": "Acceso denegado. Se requieren privilegios de administrador.",
        "admin_via_user_form": (
            "Este usuario es un administrador. "
            "Por favor use el formulario de login de administrador."
        ),
        "password_required": "Contraseña requerida para administradores.",
        "invalid_credentials": "Correo electrónico o contraseña inválidos.",
        "storage_unavailable": (
            "El servicio no está disponible temporalmente. Intente de nuevo."
        ),
        "email_taken": "Este correo electrónico ya está registrado.",
        "medical_id_taken": "Este número de identificación ya está registrado.",
        "medical_id_required": "Los asistentes deben conservar un número de identificación.",
        "attendee_password_not_allowed": "Solo los administradores tienen contraseña.",
    },
}


def resolve_locale(accept_language: str | None, default: str = "en") -> str:
    """
    Pick a supported locale from an Accept-Language header.

    Args:
        accept_language: Raw header value, e.g. "es-CO,es;q=0.9,en;q=0.8"
        default: Locale used when nothing matches

    Returns:
        A key of MESSAGES
    """
    if accept_language:
        for part in accept_language.split(","):
            tag = part.split(";", 1)[0].strip().lower()
            language = tag.split("-", 1)[0]
            if language in MESSAGES:
                return language
    return default if default in MESSAGES else "en"


def get_message(key: str, locale: str = "en") -> str:
    """Look up a message, falling back to English and then to the key itself."""
    catalog = MESSAGES.get(locale, MESSAGES["en"])
    return catalog.get(key) or MESSAGES["en"].get(key, key)
