from core.errors import EquipmentNotFound

from .models import Equipment


def get_equipment(equipment_id) -> Equipment:
    """Read-only catalog lookup used at booking creation and checkout."""
    try:
        return Equipment.objects.select_related("owner").get(pk=equipment_id)
    except (Equipment.DoesNotExist, TypeError, ValueError):
        raise EquipmentNotFound(equipment_id=str(equipment_id)) from None
