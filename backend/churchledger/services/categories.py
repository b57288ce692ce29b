"""
Canonical finance vocabulary.

These are the spellings the normalizer produces for known inputs. Stored
rows may still hold other values (see ``normalize``'s fallback).
"""

TITHE = "Dízimo"
OFFERING = "Oferta"
CAMPAIGN = "Campanha"
DONATION = "Doação"
OTHER_ENTRY = "Outra Entrada"

ENTRY_CATEGORIES = (TITHE, OFFERING, CAMPAIGN, DONATION, OTHER_ENTRY)

CASH = "Dinheiro"
CARD = "Cartão"
PIX = "PIX"
BANK_TRANSFER = "Transferência"
BANK_SLIP = "Boleto"
OTHER_METHOD = "Outro"
NOT_INFORMED = "Não informado"

PAYMENT_METHODS = (CASH, CARD, PIX, BANK_TRANSFER, BANK_SLIP, OTHER_METHOD)

OTHER_EXPENSE = "Outra Saída"

EXPENSE_CATEGORIES = (
    "Aluguel do Templo/Salão",
    "Contas de Consumo - Água",
    "Contas de Consumo - Luz",
    "Contas de Consumo - Gás",
    "Contas de Consumo - Internet",
    "Contas de Consumo - Telefone",
    "Materiais de Escritório e Papelaria",
    "Software e Assinaturas",
    "Serviços de Contabilidade e Advocacia",
    "Seguros",
    "Manutenção e Reparos Prediais",
    "Limpeza e Conservação",
    "Segurança",
    "Transporte e Deslocamento",
    "Taxas e Impostos",
    "Salário Pastoral (Prebenda, Côngrua)",
    "Ajudas de Custo para Pastores e Líderes",
    "Salários de Funcionários",
    "Encargos Sociais e Trabalhistas",
    "Benefícios",
    "Treinamento e Desenvolvimento de Líderes e Voluntários",
    "Despesas com Viagens Missionárias e Ministeriais de Líderes",
    "Departamento Infantil (Kids)",
    "Departamento de Jovens e Adolescentes",
    "Departamento de Casais",
    "Ministério de Louvor e Adoração",
    "Ministério de Ensino (Escola Bíblica Dominical, cursos)",
    "Ministério de Ação Social e Evangelismo",
    "Ministério de Comunicação",
    "Outros Ministérios",
    "Eventos Especiais (conferências, seminários, congressos)",
    "Celebrações (Páscoa, Natal, Aniversário da Igreja)",
    "Batismos e Ceias",
    "Tarifas bancárias",
    "Juros e multas",
    "Taxas de máquinas de cartão",
    "Aquisição de Imobilizado",
    "Despesas com Hospitalidade",
    "Flores e Decoração do Templo",
    "Contribuições para Convenções ou Associações Denominacionais",
    "Projetos Missionários",
    "Fundo de Reserva ou Contingência",
    OTHER_EXPENSE,
)
