"""Regional Rapid Responder SOS coordination service."""
