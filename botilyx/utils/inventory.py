# botilyx/utils/inventory.py
from datetime import timedelta


def build_inventory_alerts(medications, days_before_expiration, low_stock_threshold, today):
    """
    Expiry and low-stock alerts for a set of medications.

    A medication yields at most one expiry alert ("expiring" within the
    window, or "expired" on/after its date) and one stock alert.
    Archived medications are ignored.
    """
    threshold = today + timedelta(days=days_before_expiration)
    alerts = {}

    for med in medications:
        if med.archived:
            continue

        exp = med.expiration_date
        if exp is not None:
            if today < exp <= threshold:
                alerts[f"{med.id}-expiry"] = {
                    "id": f"{med.id}-expiry",
                    "medication_id": med.id,
                    "type": "expiry",
                    "message": f"'{med.commercial_name}' expires on {exp.isoformat()}.",
                }
            elif exp <= today:
                alerts[f"{med.id}-expiry"] = {
                    "id": f"{med.id}-expiry",
                    "medication_id": med.id,
                    "type": "expiry",
                    "message": f"'{med.commercial_name}' has expired.",
                }

        if med.current_quantity <= low_stock_threshold:
            alerts[f"{med.id}-stock"] = {
                "id": f"{med.id}-stock",
                "medication_id": med.id,
                "type": "stock",
                "message": f"Low stock of '{med.commercial_name}' ({med.current_quantity} {med.unit}).",
            }

    return list(alerts.values())
