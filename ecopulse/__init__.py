"""
EcoPulse – persönliches CO2-Tagebuch.

Zweck:
    Dieses Paket bündelt den Code des Dashboards und folgt einer Schichtenarchitektur
    (UI → Service → Live-Query/Repository → Model).

Inhalt:
    - UI-Schicht: Liste, Diagramm und Eingabedialog (keine fachliche Logik)
    - Service-Schicht: Use-Cases und Diagramm-Serien
    - Live-Query: sortierte, beobachtbare Sicht auf das Repository
    - Repository-Schicht: SQL/CRUD auf SQLite
    - Model-Schicht: Datenklassen (Entities)
"""

__all__ = []
