"""ePathway development-application scraper."""
