"""Servicios del Core (orquestación del flujo build & run)."""
