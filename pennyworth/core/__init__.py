"""Core package for shared application functionality.

- **config**: Centralized configuration management with environment support
- **environment**: Composition root owning settings, logger and database
- **exceptions**: Exception hierarchy used across layers
- **logging**: Loguru sink configuration and stdlib interception
- **money**: Fixed-point GBP amounts
- **validation**: Field-level validation rules
"""
