"""Banana HTTP API"""
