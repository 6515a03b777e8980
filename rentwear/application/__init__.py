"""Capa de aplicación: casos de uso y puertos."""
