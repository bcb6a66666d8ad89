"""Styling"""
