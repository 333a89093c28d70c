"""Configuration, logging and shared result types"""
