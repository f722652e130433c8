"""FisioHub: multi-tenant clinical indicators backend."""
