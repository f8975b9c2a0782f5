"""scraper — pobieranie źródeł (PDF, strony indeksu) i dane pomocnicze z katalogu danych."""
