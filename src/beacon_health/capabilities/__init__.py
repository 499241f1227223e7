# Capabilities - health data models
