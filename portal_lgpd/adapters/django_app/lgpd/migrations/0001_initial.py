"""
Migration inicial do domínio LGPD.

Cria as tabelas:
- solicitacoes_lgpd: Solicitações do titular
- logs_consentimento: Histórico de consentimento
- logs_auditoria: Auditoria de ações administrativas
- lgpd_access_logs: Ações no portal público
- verification_tokens: Códigos de verificação e sessões
"""

from django.db import migrations, models
import django.utils.timezone


TIPO_TITULAR_CHOICES = [('membro', 'Membro'), ('visitante', 'Visitante')]


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Tabela: solicitacoes_lgpd
        # =================================================================
        migrations.CreateModel(
            name='SolicitacaoLGPDModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='UUID único da solicitação'
                )),
                ('tipo', models.CharField(
                    max_length=20,
                    choices=[
                        ('acesso', 'Acesso'),
                        ('exportacao', 'Exportação'),
                        ('exclusao', 'Exclusão'),
                    ],
                    db_index=True,
                )),
                ('status', models.CharField(
                    max_length=20,
                    choices=[
                        ('pendente', 'Pendente'),
                        ('em_andamento', 'Em andamento'),
                        ('concluida', 'Concluída'),
                        ('recusada', 'Recusada'),
                    ],
                    default='pendente',
                    db_index=True,
                )),
                ('tipo_titular', models.CharField(max_length=20, choices=TIPO_TITULAR_CHOICES)),
                ('titular_id', models.CharField(max_length=36, db_index=True)),
                ('titular_nome', models.CharField(max_length=200)),
                ('titular_email', models.CharField(max_length=254, blank=True, default='')),
                ('motivo', models.TextField(null=True, blank=True)),
                ('justificativa_recusa', models.TextField(null=True, blank=True)),
                ('responsavel_id', models.CharField(
                    max_length=100,
                    null=True,
                    blank=True,
                    help_text='Administrador que processou'
                )),
                ('data_atendimento', models.DateTimeField(null=True, blank=True)),
                ('arquivo_exportacao', models.CharField(max_length=255, null=True, blank=True)),
                ('origem', models.CharField(
                    max_length=20,
                    choices=[
                        ('admin', 'Administração'),
                        ('portal_publico', 'Portal público'),
                    ],
                    default='admin',
                )),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now, db_index=True)),
            ],
            options={
                'verbose_name': 'Solicitação LGPD',
                'verbose_name_plural': 'Solicitações LGPD',
                'db_table': 'solicitacoes_lgpd',
                'ordering': ['-criado_em'],
                'indexes': [
                    models.Index(fields=['status', 'criado_em'], name='solic_lgpd_status_idx'),
                    models.Index(fields=['tipo_titular', 'titular_id'], name='solic_lgpd_titular_idx'),
                ],
            },
        ),

        # =================================================================
        # Tabela: logs_consentimento
        # =================================================================
        migrations.CreateModel(
            name='LogConsentimentoModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False, editable=False)),
                ('tipo_titular', models.CharField(max_length=20, choices=TIPO_TITULAR_CHOICES)),
                ('titular_id', models.CharField(max_length=36, db_index=True)),
                ('titular_nome', models.CharField(max_length=200)),
                ('acao', models.CharField(max_length=20)),
                ('consentimento_anterior', models.BooleanField()),
                ('consentimento_novo', models.BooleanField()),
                ('usuario_id', models.CharField(max_length=100, null=True, blank=True)),
                ('ip_address', models.CharField(max_length=45, null=True, blank=True)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now, db_index=True)),
            ],
            options={
                'verbose_name': 'Log de Consentimento',
                'verbose_name_plural': 'Logs de Consentimento',
                'db_table': 'logs_consentimento',
                'ordering': ['-criado_em'],
                'indexes': [
                    models.Index(fields=['tipo_titular', 'titular_id'], name='log_consent_titular_idx'),
                ],
            },
        ),

        # =================================================================
        # Tabela: logs_auditoria
        # =================================================================
        migrations.CreateModel(
            name='LogAuditoriaModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False, editable=False)),
                ('modulo', models.CharField(max_length=50, db_index=True)),
                ('acao', models.CharField(max_length=50)),
                ('descricao', models.TextField()),
                ('registro_id', models.CharField(max_length=36, null=True, blank=True, db_index=True)),
                ('usuario_id', models.CharField(max_length=100)),
                ('usuario_nome', models.CharField(max_length=200)),
                ('usuario_cargo', models.CharField(max_length=30)),
                ('ip_address', models.CharField(max_length=45, null=True, blank=True)),
                ('dados_anteriores', models.JSONField(null=True, blank=True)),
                ('dados_novos', models.JSONField(null=True, blank=True)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now, db_index=True)),
            ],
            options={
                'verbose_name': 'Log de Auditoria',
                'verbose_name_plural': 'Logs de Auditoria',
                'db_table': 'logs_auditoria',
                'ordering': ['-criado_em'],
            },
        ),

        # =================================================================
        # Tabela: lgpd_access_logs
        # =================================================================
        migrations.CreateModel(
            name='LogAcessoLGPDModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False, editable=False)),
                ('tipo_titular', models.CharField(max_length=20)),
                ('titular_id', models.CharField(max_length=36, db_index=True)),
                ('titular_nome', models.CharField(max_length=200)),
                ('acao', models.CharField(max_length=30)),
                ('canal_verificacao', models.CharField(max_length=10, null=True, blank=True)),
                ('ip_address', models.CharField(max_length=45, null=True, blank=True)),
                ('user_agent', models.TextField(null=True, blank=True)),
                ('sucesso', models.BooleanField(default=True)),
                ('motivo_falha', models.TextField(null=True, blank=True)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now, db_index=True)),
            ],
            options={
                'verbose_name': 'Log de Acesso LGPD',
                'verbose_name_plural': 'Logs de Acesso LGPD',
                'db_table': 'lgpd_access_logs',
                'ordering': ['-criado_em'],
            },
        ),

        # =================================================================
        # Tabela: verification_tokens
        # =================================================================
        migrations.CreateModel(
            name='VerificationTokenModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False, editable=False)),
                ('hashed_codigo', models.CharField(max_length=100)),
                ('tipo_titular', models.CharField(max_length=20, choices=TIPO_TITULAR_CHOICES)),
                ('titular_id', models.CharField(max_length=36, db_index=True)),
                ('telefone', models.CharField(max_length=30, null=True, blank=True)),
                ('email', models.CharField(max_length=254, null=True, blank=True)),
                ('canal', models.CharField(max_length=10)),
                ('tentativas_validacao', models.IntegerField(default=0)),
                ('validado', models.BooleanField(default=False)),
                ('session_token', models.CharField(max_length=64, null=True, blank=True, unique=True)),
                ('session_expires_at', models.DateTimeField(null=True, blank=True)),
                ('expires_at', models.DateTimeField(db_index=True)),
                ('validado_em', models.DateTimeField(null=True, blank=True)),
                ('revogado', models.BooleanField(default=False)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Token de Verificação',
                'verbose_name_plural': 'Tokens de Verificação',
                'db_table': 'verification_tokens',
                'ordering': ['-criado_em'],
            },
        ),
    ]
