"""WMS Terminal — core: errors, local storage helpers, application context."""
