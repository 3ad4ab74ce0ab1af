# campaign_service/__init__.py
