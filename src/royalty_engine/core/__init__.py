"""Core configuration, logging and pure domain rules"""
