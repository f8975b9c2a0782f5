"""analysis — statystyki zbiorcze nad zrekonstruowanymi arkuszami głosowań."""
