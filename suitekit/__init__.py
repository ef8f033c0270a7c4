"""Suite tree tooling: property export, retry queries and parallel scope checks."""
