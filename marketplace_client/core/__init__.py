"""Core Layer - 설정, 로깅, 예외 계층"""
