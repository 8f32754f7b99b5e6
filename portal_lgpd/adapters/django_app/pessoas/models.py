"""
Django Models do cadastro de pessoas.

Tabelas mínimas lidas pelo motor de exportação e removidas pelo
motor de exclusão: membros, visitantes, famílias, notas pastorais,
transações financeiras e ações diaconais.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- O core enxerga membros e visitantes apenas como `Titular`
  (via DjangoTitularRepository)
"""

from django.db import models
from django.utils import timezone
import uuid


def _novo_id() -> str:
    return str(uuid.uuid4())


class FamiliaModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=_novo_id, editable=False)
    nome = models.CharField(max_length=200)
    endereco = models.TextField(null=True, blank=True)
    criado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'familias'
        verbose_name = 'Família'
        verbose_name_plural = 'Famílias'

    def __str__(self):
        return self.nome


class MembroModel(models.Model):
    """
    Membro da igreja.

    Fields relevantes para LGPD:
        cpf: Somente dígitos (normalizado ao salvar)
        data_nascimento: Usada na verificação do portal público
        familia: Família vinculada (exportada junto)
        consentimento_lgpd: Estado atual do consentimento
    """

    id = models.CharField(max_length=36, primary_key=True, default=_novo_id, editable=False)
    nome = models.CharField(max_length=200, db_index=True)
    cpf = models.CharField(max_length=11, null=True, blank=True, db_index=True)
    email = models.EmailField(null=True, blank=True)
    telefone = models.CharField(max_length=30, null=True, blank=True)
    data_nascimento = models.DateField(null=True, blank=True)
    endereco = models.TextField(null=True, blank=True)
    cidade = models.CharField(max_length=100, blank=True, default='')
    estado_civil = models.CharField(max_length=30, null=True, blank=True)
    profissao = models.CharField(max_length=100, null=True, blank=True)
    data_batismo = models.DateField(null=True, blank=True)
    familia = models.ForeignKey(
        FamiliaModel,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='membros',
    )
    status = models.CharField(max_length=20, default='ativo')
    consentimento_lgpd = models.BooleanField(default=False)
    criado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'membros'
        verbose_name = 'Membro'
        verbose_name_plural = 'Membros'
        ordering = ['nome']
        indexes = [
            models.Index(fields=['cpf', 'data_nascimento'], name='membros_cpf_nasc_idx'),
        ]

    def __str__(self):
        return self.nome


class VisitanteModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=_novo_id, editable=False)
    nome = models.CharField(max_length=200, db_index=True)
    cpf = models.CharField(max_length=11, null=True, blank=True, db_index=True)
    email = models.EmailField(null=True, blank=True)
    telefone = models.CharField(max_length=30, null=True, blank=True)
    data_nascimento = models.DateField(null=True, blank=True)
    endereco = models.TextField(null=True, blank=True)
    como_conheceu = models.CharField(max_length=200, null=True, blank=True)
    data_visita = models.DateField(default=timezone.localdate)
    observacoes = models.TextField(null=True, blank=True)
    status = models.CharField(max_length=30, default='novo')
    consentimento_lgpd = models.BooleanField(default=False)
    criado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'visitantes'
        verbose_name = 'Visitante'
        verbose_name_plural = 'Visitantes'
        ordering = ['nome']
        indexes = [
            models.Index(fields=['cpf', 'data_nascimento'], name='visitantes_cpf_nasc_idx'),
        ]

    def __str__(self):
        return self.nome


class NotaPastoralModel(models.Model):
    """Nota pastoral. O conteúdo nunca é exportado (apenas metadados)."""

    id = models.CharField(max_length=36, primary_key=True, default=_novo_id, editable=False)
    membro_id = models.CharField(max_length=36, db_index=True)
    titulo = models.CharField(max_length=200)
    conteudo = models.TextField()
    nivel_sigilo = models.CharField(max_length=20, default='normal')
    autor_id = models.CharField(max_length=100)
    criado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'notas_pastorais'
        verbose_name = 'Nota Pastoral'
        verbose_name_plural = 'Notas Pastorais'
        ordering = ['-criado_em']


class TransacaoFinanceiraModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=_novo_id, editable=False)
    tipo = models.CharField(max_length=20)
    categoria = models.CharField(max_length=50)
    descricao = models.TextField()
    valor = models.IntegerField(help_text="Valor em centavos")
    data = models.DateField()
    membro_id = models.CharField(max_length=36, null=True, blank=True, db_index=True)
    centro_custo = models.CharField(max_length=30, default='geral')
    metodo_pagamento = models.CharField(max_length=30, null=True, blank=True)
    criado_por_id = models.CharField(max_length=100)
    criado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'transacoes_financeiras'
        verbose_name = 'Transação Financeira'
        verbose_name_plural = 'Transações Financeiras'
        ordering = ['-data']


class AcaoDiaconalModel(models.Model):
    """Ação diaconal. Mantida na exclusão (prestação de contas)."""

    id = models.CharField(max_length=36, primary_key=True, default=_novo_id, editable=False)
    tipo = models.CharField(max_length=30)
    descricao = models.TextField()
    beneficiario = models.CharField(max_length=200, db_index=True)
    telefone = models.CharField(max_length=30, null=True, blank=True)
    valor_gasto = models.IntegerField(null=True, blank=True, help_text="Valor em centavos")
    data = models.DateField()
    responsavel_id = models.CharField(max_length=100)
    observacoes = models.TextField(null=True, blank=True)
    criado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'acoes_diaconais'
        verbose_name = 'Ação Diaconal'
        verbose_name_plural = 'Ações Diaconais'
        ordering = ['-data']
