"""
Core modules for facadegen.

This package contains the core business logic for:
- Configuration
- Domain models and data URL handling
- Technical plan parsing
- The HTTP transport and the generation client
"""
