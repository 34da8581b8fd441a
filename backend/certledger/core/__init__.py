"""Core configuration, exceptions and exception handlers"""
