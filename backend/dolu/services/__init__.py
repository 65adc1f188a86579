"""
Service layer: pricing, tracking ids, booking lifecycle, messaging and reference data.
"""
