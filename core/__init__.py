# Core package - foundational components
#
# Modules:
# - config: Application settings
# - logging: Structured logging
# - errors: Typed store errors
# - database: Engine construction
# - storage: Subscriber store
