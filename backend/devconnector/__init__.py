"""DevConnector backend: posts, profiles and their nested sub-collections."""
