"""Royalty engine services"""
