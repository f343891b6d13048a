"""Banana command-line interface"""
