"""
Django Models do domínio LGPD.

Estes models são ADAPTERS - implementam a persistência das
entidades definidas em portal_lgpd/core/lgpd/entities.py.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- Conversão Model ↔ Entity fica nos Mappers

Tabelas:
- solicitacoes_lgpd: solicitações do titular (nunca removidas)
- logs_consentimento: histórico de consentimento (append-only)
- logs_auditoria: ações administrativas (append-only)
- lgpd_access_logs: ações no portal público
- verification_tokens: códigos de verificação e sessões
"""

from django.db import models
from django.utils import timezone


class TipoTitularChoices(models.TextChoices):
    MEMBRO = 'membro', 'Membro'
    VISITANTE = 'visitante', 'Visitante'


class TipoSolicitacaoChoices(models.TextChoices):
    ACESSO = 'acesso', 'Acesso'
    EXPORTACAO = 'exportacao', 'Exportação'
    EXCLUSAO = 'exclusao', 'Exclusão'


class StatusSolicitacaoChoices(models.TextChoices):
    """Espelha StatusSolicitacao do Core."""
    PENDENTE = 'pendente', 'Pendente'
    EM_ANDAMENTO = 'em_andamento', 'Em andamento'
    CONCLUIDA = 'concluida', 'Concluída'
    RECUSADA = 'recusada', 'Recusada'


class OrigemSolicitacaoChoices(models.TextChoices):
    ADMIN = 'admin', 'Administração'
    PORTAL_PUBLICO = 'portal_publico', 'Portal público'


class SolicitacaoLGPDModel(models.Model):
    """
    Solicitação LGPD persistida.

    Fields:
        id: UUID gerado pela Entity
        tipo / status / origem: choices espelhando os enums do Core
        tipo_titular + titular_id: referência ao titular (sem FK, pois
            a solicitação sobrevive à exclusão do titular)
        titular_nome / titular_email: cópia no momento da criação
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="UUID único da solicitação"
    )

    tipo = models.CharField(
        max_length=20,
        choices=TipoSolicitacaoChoices.choices,
        db_index=True,
    )

    status = models.CharField(
        max_length=20,
        choices=StatusSolicitacaoChoices.choices,
        default=StatusSolicitacaoChoices.PENDENTE,
        db_index=True,
    )

    tipo_titular = models.CharField(max_length=20, choices=TipoTitularChoices.choices)
    titular_id = models.CharField(max_length=36, db_index=True)
    titular_nome = models.CharField(max_length=200)
    titular_email = models.CharField(max_length=254, blank=True, default='')

    motivo = models.TextField(null=True, blank=True)
    justificativa_recusa = models.TextField(null=True, blank=True)

    responsavel_id = models.CharField(
        max_length=100,
        null=True,
        blank=True,
        help_text="Administrador que processou"
    )
    data_atendimento = models.DateTimeField(null=True, blank=True)
    arquivo_exportacao = models.CharField(max_length=255, null=True, blank=True)

    origem = models.CharField(
        max_length=20,
        choices=OrigemSolicitacaoChoices.choices,
        default=OrigemSolicitacaoChoices.ADMIN,
    )

    criado_em = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'solicitacoes_lgpd'
        verbose_name = 'Solicitação LGPD'
        verbose_name_plural = 'Solicitações LGPD'
        ordering = ['-criado_em']
        indexes = [
            models.Index(fields=['status', 'criado_em'], name='solic_lgpd_status_idx'),
            models.Index(fields=['tipo_titular', 'titular_id'], name='solic_lgpd_titular_idx'),
        ]

    def __str__(self):
        return f"[{self.id[:8]}] {self.tipo} - {self.titular_nome}"

    def __repr__(self):
        return f"<SolicitacaoLGPDModel id={self.id[:8]} status={self.status}>"


class LogConsentimentoModel(models.Model):
    """Histórico de consentimento. Removido apenas pela cascata de exclusão."""

    id = models.CharField(max_length=36, primary_key=True, editable=False)
    tipo_titular = models.CharField(max_length=20, choices=TipoTitularChoices.choices)
    titular_id = models.CharField(max_length=36, db_index=True)
    titular_nome = models.CharField(max_length=200)
    acao = models.CharField(max_length=20)
    consentimento_anterior = models.BooleanField()
    consentimento_novo = models.BooleanField()
    usuario_id = models.CharField(max_length=100, null=True, blank=True)
    ip_address = models.CharField(max_length=45, null=True, blank=True)
    criado_em = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'logs_consentimento'
        verbose_name = 'Log de Consentimento'
        verbose_name_plural = 'Logs de Consentimento'
        ordering = ['-criado_em']
        indexes = [
            models.Index(fields=['tipo_titular', 'titular_id'], name='log_consent_titular_idx'),
        ]


class LogAuditoriaModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    modulo = models.CharField(max_length=50, db_index=True)
    acao = models.CharField(max_length=50)
    descricao = models.TextField()
    registro_id = models.CharField(max_length=36, null=True, blank=True, db_index=True)
    usuario_id = models.CharField(max_length=100)
    usuario_nome = models.CharField(max_length=200)
    usuario_cargo = models.CharField(max_length=30)
    ip_address = models.CharField(max_length=45, null=True, blank=True)
    dados_anteriores = models.JSONField(null=True, blank=True)
    dados_novos = models.JSONField(null=True, blank=True)
    criado_em = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'logs_auditoria'
        verbose_name = 'Log de Auditoria'
        verbose_name_plural = 'Logs de Auditoria'
        ordering = ['-criado_em']


class LogAcessoLGPDModel(models.Model):
    """Cada ação do portal público (sucesso ou falha)."""

    id = models.CharField(max_length=36, primary_key=True, editable=False)
    tipo_titular = models.CharField(max_length=20)
    titular_id = models.CharField(max_length=36, db_index=True)
    titular_nome = models.CharField(max_length=200)
    acao = models.CharField(max_length=30)
    canal_verificacao = models.CharField(max_length=10, null=True, blank=True)
    ip_address = models.CharField(max_length=45, null=True, blank=True)
    user_agent = models.TextField(null=True, blank=True)
    sucesso = models.BooleanField(default=True)
    motivo_falha = models.TextField(null=True, blank=True)
    criado_em = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'lgpd_access_logs'
        verbose_name = 'Log de Acesso LGPD'
        verbose_name_plural = 'Logs de Acesso LGPD'
        ordering = ['-criado_em']


class VerificationTokenModel(models.Model):
    """
    Código de verificação (hash bcrypt) e sessão derivada.

    O código em texto puro nunca é persistido.
    """

    id = models.CharField(max_length=36, primary_key=True, editable=False)
    hashed_codigo = models.CharField(max_length=100)
    tipo_titular = models.CharField(max_length=20, choices=TipoTitularChoices.choices)
    titular_id = models.CharField(max_length=36, db_index=True)
    telefone = models.CharField(max_length=30, null=True, blank=True)
    email = models.CharField(max_length=254, null=True, blank=True)
    canal = models.CharField(max_length=10)
    tentativas_validacao = models.IntegerField(default=0)
    validado = models.BooleanField(default=False)
    session_token = models.CharField(max_length=64, null=True, blank=True, unique=True)
    session_expires_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(db_index=True)
    validado_em = models.DateTimeField(null=True, blank=True)
    revogado = models.BooleanField(default=False)
    criado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'verification_tokens'
        verbose_name = 'Token de Verificação'
        verbose_name_plural = 'Tokens de Verificação'
        ordering = ['-criado_em']
