"""Message Catalog - user-facing Spanish text for API envelopes.

Invariants:
    - All strings are pure data (no IO, no computation beyond formatting)
    - Every user-visible message in responses comes from this module
    - Placeholders use str.format keyword fields
"""

# --- Generic -----------------------------------------------------------------

INVALID_INPUT = "Datos de entrada inválidos"
INTERNAL_ERROR = "Error interno del servidor"
SERVICE_UNAVAILABLE = "Servicio temporalmente no disponible"
UNAUTHENTICATED = "Usuario no autenticado"
INSUFFICIENT_PERMISSIONS = "No tiene permisos para realizar esta operación"

RATE_LIMIT_GLOBAL = "Demasiadas solicitudes. Intente más tarde."
RATE_LIMIT_CREATE_EDIT = (
    "Demasiadas operaciones de creación/edición. Intente más tarde."
)
RATE_LIMIT_STATS = "Demasiadas solicitudes de estadísticas. Intente más tarde."

# --- Speakers ----------------------------------------------------------------

SPEAKER_CREATED = "Speaker creado exitosamente"
SPEAKER_UPDATED = "Speaker actualizado exitosamente"
SPEAKER_DELETED = "Speaker eliminado exitosamente"
SPEAKER_VERIFIED = "Speaker verificado exitosamente"
SPEAKER_FETCHED = "Speaker obtenido exitosamente"
SPEAKERS_FETCHED = "Speakers obtenidos exitosamente"
SPEAKER_NOT_FOUND = "Speaker no encontrado"
SPEAKER_UPDATE_FORBIDDEN = "No tiene permisos para actualizar este speaker"
SPEAKER_DELETE_FORBIDDEN = "No tiene permisos para eliminar este speaker"
SPEAKER_HAS_FUTURE_EVENTS = (
    "No se puede eliminar un speaker con eventos futuros asignados"
)
SPEAKER_EMAIL_TAKEN = "Ya existe un speaker con ese email"
SPECIALTIES_NOT_FOUND = "Una o más especialidades no existen"
SPEAKER_STATS_FETCHED = "Estadísticas obtenidas exitosamente"
SPEAKER_EVENTS_FETCHED = "Eventos obtenidos exitosamente"

AVAILABILITY_CREATED = "Bloqueo de disponibilidad creado exitosamente"
AVAILABILITY_CONFLICT = "Ya existe un bloqueo de disponibilidad en ese horario"
END_AFTER_START = "La fecha de fin debe ser posterior a la fecha de inicio"

EVALUATION_CREATED = "Evaluación creada exitosamente"
SPEAKER_EVENT_NOT_COMPLETED = (
    "El speaker no participó en este evento o aún no ha finalizado"
)

# --- Events ------------------------------------------------------------------

EVENT_CREATED = "Evento creado exitosamente"
EVENT_FETCHED = "Evento obtenido exitosamente"
EVENT_DUPLICATED = "Evento duplicado exitosamente"
EVENT_CANCELLED = "Evento cancelado exitosamente"
EVENT_NOT_FOUND = "Evento no encontrado"
EVENT_ALREADY_CANCELLED = "El evento ya se encuentra cancelado"
EVENT_FORBIDDEN = "No tiene permisos para modificar este evento"

TITLE_REQUIRED = "El título del evento es obligatorio"
TITLE_TOO_SHORT = "El título debe tener al menos 3 caracteres"
TITLE_TOO_LONG = "El título no puede exceder 100 caracteres"
START_IN_PAST = "La fecha de inicio no puede ser en el pasado"
DURATION_TOO_LONG = "La duración del evento no puede exceder {max_days} días"
LOCATION_REQUIRED = "La ubicación es obligatoria para eventos presenciales"
LOCATION_TOO_SHORT = "La ubicación debe tener al menos 5 caracteres"
VIRTUAL_LOCATION_REQUIRED = (
    "El enlace virtual es obligatorio para eventos virtuales"
)
VIRTUAL_LOCATION_INVALID = (
    "El enlace virtual debe ser una URL válida (https://...)"
)
MAX_AGE_BELOW_MIN = "La edad máxima debe ser mayor o igual que la mínima"
TOO_MANY_TAGS = "No puede tener más de 10 etiquetas"
TAG_TOO_LONG = "Cada etiqueta no puede exceder 20 caracteres"
DATES_TOGETHER_END = (
    "Debe proporcionar la fecha de fin si modifica la fecha de inicio"
)
DATES_TOGETHER_START = (
    "Debe proporcionar la fecha de inicio si modifica la fecha de fin"
)

SPEAKER_ASSIGNED = "Speaker asignado al evento exitosamente"
SPEAKER_EVENT_UPDATED = "Estado del evento actualizado exitosamente"
SPEAKER_EVENT_NOT_FOUND = "Evento asignado no encontrado"
PARTICIPATION_FINAL = (
    "La participación ya fue completada o cancelada y no puede modificarse"
)
SPEAKER_UNAVAILABLE = (
    "El speaker tiene un bloqueo de disponibilidad en ese horario"
)
SPEAKER_ALREADY_ASSIGNED = "El speaker ya está asignado a este evento"

ATTENDANCE_FETCHED = "Reporte de asistencia obtenido exitosamente"
CHECKED_IN = "Asistencia registrada exitosamente"
REGISTRATION_NOT_FOUND = "Inscripción no encontrada"
REGISTRATION_NOT_CONFIRMED = (
    "Solo se puede registrar asistencia de inscripciones confirmadas"
)

# --- Capacity ----------------------------------------------------------------

CAPACITY_CONFIGURED = "Capacidad configurada exitosamente"
CAPACITY_UPDATED = "Capacidad actualizada exitosamente"
CAPACITY_STATUS_FETCHED = "Estado de capacidad obtenido exitosamente"
CAPACITY_NOT_CONFIGURED = "Capacidad no configurada para este evento"
CAPACITY_FORBIDDEN = (
    "No tiene permisos para configurar la capacidad de este evento"
)
CAPACITY_VALIDATED = "Validación de capacidad completada"
CAPACITY_REPORT_GENERATED = "Reporte generado exitosamente"
INVALID_TOTAL_CAPACITY = "La capacidad total debe ser mayor a 0"
INVALID_OVERBOOKING = "El porcentaje de overbooking debe estar entre 0 y 50"
INVALID_LOCK_TIMEOUT = "El tiempo de bloqueo debe estar entre 5 y 60 minutos"

INSUFFICIENT_CAPACITY = (
    "No hay suficientes cupos disponibles. "
    "Cupos disponibles: {available}, solicitados: {requested}"
)
HIGH_UTILIZATION = "Capacidad altamente utilizada"
MEDIUM_UTILIZATION = "Capacidad moderadamente utilizada"
LOW_UTILIZATION = "Capacidad baja disponible"
OVERBOOKING_ACTIVE = (
    "Usando capacidad de overbooking ({percentage}% adicional)"
)

CAPACITY_RESERVED = "Capacidad reservada exitosamente"
RESERVATION_CONFIRMED = "Reserva confirmada exitosamente"
RESERVATION_RELEASED = "Reserva liberada exitosamente"
LOCKS_FETCHED = "Bloqueos activos obtenidos exitosamente"
LOCK_NOT_FOUND = "Bloqueo de capacidad no encontrado"
LOCK_NOT_ACTIVE = "El bloqueo de capacidad ya no está activo"
LOCK_EXPIRED = "El bloqueo de capacidad ha expirado"
LOCK_FORBIDDEN = "No tiene permisos sobre este bloqueo"
EXPIRED_RESERVATIONS_PROCESSED = "Procesadas {count} reservas expiradas"

# --- Waitlist ----------------------------------------------------------------

WAITLIST_JOINED = "Agregado a la lista de espera en posición {position}"
WAITLIST_LEFT = "Removido de la lista de espera exitosamente"
WAITLIST_DISABLED = "La lista de espera no está habilitada para este evento"
WAITLIST_FETCHED = "Lista de espera obtenida exitosamente"
WAITLIST_POSITION_FETCHED = "Posición obtenida exitosamente"
WAITLIST_NOT_IN_QUEUE = "Usuario no está en lista de espera"
WAITLIST_STATS_FETCHED = "Estadísticas de lista de espera obtenidas exitosamente"
WAITLIST_EMPTY = "No hay usuarios en lista de espera"
WAITLIST_NOTIFIED = "Usuario notificado exitosamente"
WAITLIST_CONFIRMED = "Entrada de lista de espera confirmada exitosamente"
WAITLIST_ENTRY_NOT_FOUND = "Entrada en lista de espera no encontrada"
WAITLIST_FORBIDDEN = "No tienes permisos sobre esta entrada"
WAITLIST_INVALID_STATUS = "Esta entrada no puede ser confirmada"
WAITLIST_EXPIRED = "El tiempo para confirmar ha expirado"
ALREADY_REGISTERED = "Ya estás registrado para este evento"
ALREADY_IN_WAITLIST = "Ya estás en la lista de espera de este evento"
EXPIRED_ENTRIES_PROCESSED = "Procesadas {count} entradas expiradas"

# --- Audit -------------------------------------------------------------------

AUDIT_LOGS_FETCHED = "Logs de auditoría obtenidos exitosamente"
AUDIT_LOG_FETCHED = "Log de auditoría obtenido exitosamente"
AUDIT_LOG_NOT_FOUND = "Log de auditoría no encontrado"
AUDIT_STATS_FETCHED = "Estadísticas de auditoría obtenidas exitosamente"
AUDIT_CLEANUP_DONE = "Limpieza completada: {count} registros eliminados"
AUDIT_CLEANUP_DRY_RUN = "Simulación: {count} registros serían eliminados"
