"""Customer email builders."""
