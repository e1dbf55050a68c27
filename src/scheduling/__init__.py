"""Scheduling: motor de disponibilidade e conflitos de agendamento do salão.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- domain/: modelos (Appointment, agendas, recursos, slots)
- services/: regras do motor (intervalos, expediente, conflitos, recorrência)
- infra/: implementações concretas de IO (Firestore, memória)
- protocols/: contratos/interfaces consumidos pelo motor
- observability/: contexto de logs (correlation_id, company_id)

Padrão: services decidem; infra persiste; protocols desacoplam.
"""
