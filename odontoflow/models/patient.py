from sqlalchemy import Column, String, Text, JSON
from .base import Base, TimestampMixin, generate_uuid


class Classification:
    MA = "MA"
    MI = "MI"
    DD = "DD"
    FAB_EB = "FAB/EB"

    ALL = [MA, MI, DD, FAB_EB]


# Controlled vocabulary of clinical procedures, in display order
PROCEDURES = [
    "Avaliação odontológica inicial",
    "Acabamento, polimento e ajuste oclusal",
    "Capeamento Direto/Indireto",
    "Restauração de ionômero (exceto núcleo de preenchimento)",
    "Restauração de resina (até 3 faces)",
    "Restauração provisória",
    "Orientação de higiene oral",
    "Profilaxia (polimento coronário)",
    "Raspagem supragengival",
    "Dessensibilização dentinária",
    "Manutenção do tratamento periodontal básico",
    "Raspagem subgengival (bolsa até 6mm)",
    "Radiografia periapical",
    "Consulta pré-operatória",
    "Controle pós-operatório",
    "Exodontia simples",
    "Remoção de foco residual",
    "Remoção de sutura",
    "Restauração provisória em resina autopolimerizável",
    "Recimentação",
    "Aumento de coroa clínica por elemento",
    "Urgência",
    "Ajuste oclusal",
    "Cimentação",
]


class Patient(Base, TimestampMixin):
    __tablename__ = "patients"

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=False, index=True)
    classification = Column(String(10), nullable=False, index=True)
    procedures = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)
