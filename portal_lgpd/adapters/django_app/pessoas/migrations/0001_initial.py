"""
Migration inicial do cadastro de pessoas.

Cria as tabelas:
- familias
- membros
- visitantes
- notas_pastorais
- transacoes_financeiras
- acoes_diaconais
"""

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone

import portal_lgpd.adapters.django_app.pessoas.models


def _pk():
    return models.CharField(
        max_length=36,
        primary_key=True,
        serialize=False,
        editable=False,
        default=portal_lgpd.adapters.django_app.pessoas.models._novo_id,
    )


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Tabela: familias
        # =================================================================
        migrations.CreateModel(
            name='FamiliaModel',
            fields=[
                ('id', _pk()),
                ('nome', models.CharField(max_length=200)),
                ('endereco', models.TextField(blank=True, null=True)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Família',
                'verbose_name_plural': 'Famílias',
                'db_table': 'familias',
            },
        ),

        # =================================================================
        # Tabela: membros
        # =================================================================
        migrations.CreateModel(
            name='MembroModel',
            fields=[
                ('id', _pk()),
                ('nome', models.CharField(db_index=True, max_length=200)),
                ('cpf', models.CharField(blank=True, db_index=True, max_length=11, null=True)),
                ('email', models.EmailField(blank=True, max_length=254, null=True)),
                ('telefone', models.CharField(blank=True, max_length=30, null=True)),
                ('data_nascimento', models.DateField(blank=True, null=True)),
                ('endereco', models.TextField(blank=True, null=True)),
                ('cidade', models.CharField(blank=True, default='', max_length=100)),
                ('estado_civil', models.CharField(blank=True, max_length=30, null=True)),
                ('profissao', models.CharField(blank=True, max_length=100, null=True)),
                ('data_batismo', models.DateField(blank=True, null=True)),
                ('familia', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='membros',
                    to='pessoas.familiamodel',
                )),
                ('status', models.CharField(default='ativo', max_length=20)),
                ('consentimento_lgpd', models.BooleanField(default=False)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Membro',
                'verbose_name_plural': 'Membros',
                'db_table': 'membros',
                'ordering': ['nome'],
                'indexes': [
                    models.Index(fields=['cpf', 'data_nascimento'], name='membros_cpf_nasc_idx'),
                ],
            },
        ),

        # =================================================================
        # Tabela: visitantes
        # =================================================================
        migrations.CreateModel(
            name='VisitanteModel',
            fields=[
                ('id', _pk()),
                ('nome', models.CharField(db_index=True, max_length=200)),
                ('cpf', models.CharField(blank=True, db_index=True, max_length=11, null=True)),
                ('email', models.EmailField(blank=True, max_length=254, null=True)),
                ('telefone', models.CharField(blank=True, max_length=30, null=True)),
                ('data_nascimento', models.DateField(blank=True, null=True)),
                ('endereco', models.TextField(blank=True, null=True)),
                ('como_conheceu', models.CharField(blank=True, max_length=200, null=True)),
                ('data_visita', models.DateField(default=django.utils.timezone.localdate)),
                ('observacoes', models.TextField(blank=True, null=True)),
                ('status', models.CharField(default='novo', max_length=30)),
                ('consentimento_lgpd', models.BooleanField(default=False)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Visitante',
                'verbose_name_plural': 'Visitantes',
                'db_table': 'visitantes',
                'ordering': ['nome'],
                'indexes': [
                    models.Index(fields=['cpf', 'data_nascimento'], name='visitantes_cpf_nasc_idx'),
                ],
            },
        ),

        # =================================================================
        # Registros dependentes
        # =================================================================
        migrations.CreateModel(
            name='NotaPastoralModel',
            fields=[
                ('id', _pk()),
                ('membro_id', models.CharField(db_index=True, max_length=36)),
                ('titulo', models.CharField(max_length=200)),
                ('conteudo', models.TextField()),
                ('nivel_sigilo', models.CharField(default='normal', max_length=20)),
                ('autor_id', models.CharField(max_length=100)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Nota Pastoral',
                'verbose_name_plural': 'Notas Pastorais',
                'db_table': 'notas_pastorais',
                'ordering': ['-criado_em'],
            },
        ),
        migrations.CreateModel(
            name='TransacaoFinanceiraModel',
            fields=[
                ('id', _pk()),
                ('tipo', models.CharField(max_length=20)),
                ('categoria', models.CharField(max_length=50)),
                ('descricao', models.TextField()),
                ('valor', models.IntegerField(help_text='Valor em centavos')),
                ('data', models.DateField()),
                ('membro_id', models.CharField(blank=True, db_index=True, max_length=36, null=True)),
                ('centro_custo', models.CharField(default='geral', max_length=30)),
                ('metodo_pagamento', models.CharField(blank=True, max_length=30, null=True)),
                ('criado_por_id', models.CharField(max_length=100)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Transação Financeira',
                'verbose_name_plural': 'Transações Financeiras',
                'db_table': 'transacoes_financeiras',
                'ordering': ['-data'],
            },
        ),
        migrations.CreateModel(
            name='AcaoDiaconalModel',
            fields=[
                ('id', _pk()),
                ('tipo', models.CharField(max_length=30)),
                ('descricao', models.TextField()),
                ('beneficiario', models.CharField(db_index=True, max_length=200)),
                ('telefone', models.CharField(blank=True, max_length=30, null=True)),
                ('valor_gasto', models.IntegerField(blank=True, help_text='Valor em centavos', null=True)),
                ('data', models.DateField()),
                ('responsavel_id', models.CharField(max_length=100)),
                ('observacoes', models.TextField(blank=True, null=True)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Ação Diaconal',
                'verbose_name_plural': 'Ações Diaconais',
                'db_table': 'acoes_diaconais',
                'ordering': ['-data'],
            },
        ),
    ]
