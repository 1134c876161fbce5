"""Telemetry Session Gateway - Zabbix inventory and health telemetry for the browser."""
__version__ = "0.1.0"
